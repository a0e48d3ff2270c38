def question_generation_system_prompt() -> str:
    return (
        "You write multiple-choice screening questions for job candidates. "
        "Return only valid JSON. No markdown, no extra text."
    )


def question_generation_user_prompt(
    *,
    job_title: str,
    job_description: str,
    count: int,
    difficulty: str | None,
) -> str:
    level = difficulty or "a mix of easy, medium and hard"
    return (
        f"Write {count} multiple-choice questions to assess candidates for this job.\n\n"
        "Return JSON in this exact shape:\n"
        "{\n"
        '  "questions": [\n'
        '    {"question_text": string, "question_type": "mcq", "difficulty": string,\n'
        '     "options": string[], "answers": string[]}\n'
        "  ]\n"
        "}\n\n"
        "Rules:\n"
        "- 4 options per question.\n"
        "- answers lists the correct option(s), copied exactly from options, in option order.\n"
        f"- Difficulty: {level}.\n"
        "- Test skills the job actually needs; no trivia about the company.\n\n"
        f"Job title: {job_title}\n"
        "Job description:\n"
        "-----\n"
        f"{job_description or ''}\n"
        "-----\n"
    )
