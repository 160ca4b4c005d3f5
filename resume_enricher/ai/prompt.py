from __future__ import annotations

TARGET_SHAPE = """{
    "name": "",
    "email": "",
    "education": {
        "degree": "",
        "branch": "",
        "institution": "",
        "year": null
    },
    "experience": {
        "job_title": "",
        "company": ""
    },
    "skills": [],
    "summary": ""
}"""


def build_extraction_prompt(raw_text: str) -> str:
    return (
        "Extract the following information from the provided resume text and "
        "return it as a pure JSON object:\n"
        f"{TARGET_SHAPE}\n\n"
        "Resume Text:\n"
        f"{raw_text.strip()}\n\n"
        "Return ONLY a valid JSON object, and nothing else. "
        "Do not include any surrounding text. "
        "Do not include any markdown. "
        "Do not include any explanations. "
        "Do not include any introductory phrases. "
        "If any information is not found, leave the corresponding field blank "
        "or null, as appropriate. "
        "The summary should be a short description of the candidate's profile, "
        "generated based on the resume data."
    )
