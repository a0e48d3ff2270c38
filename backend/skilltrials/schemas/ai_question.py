from pydantic import BaseModel, Field, model_validator


class GeneratedQuestion(BaseModel):
    question_text: str = Field(min_length=1)
    question_type: str = "mcq"
    difficulty: str | None = None
    options: list[str] = Field(min_length=2)
    answers: list[str] = Field(min_length=1)

    @model_validator(mode="after")
    def _answers_are_options(self) -> "GeneratedQuestion":
        self.options = [o.strip() for o in self.options if o and o.strip()]
        self.answers = [a.strip() for a in self.answers if a and a.strip()]
        if len(self.options) < 2:
            raise ValueError("a question needs at least two options")
        unknown = [a for a in self.answers if a not in self.options]
        if not self.answers or unknown:
            raise ValueError("answers must be taken from options")
        return self
