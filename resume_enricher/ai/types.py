from typing import Protocol


class AIClient(Protocol):
    async def generate(self, prompt: str) -> str: ...

    async def aclose(self) -> None: ...
