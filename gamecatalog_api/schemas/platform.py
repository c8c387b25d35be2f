from pydantic import BaseModel, Field, field_validator

CODE_PATTERN = r"^[A-Za-z0-9_\-]+$"


class Platform(BaseModel):
    code: str
    description: str
    abbreviation: str

    class Config:
        from_attributes = True


class PlatformCreate(BaseModel):
    code: str = Field(..., min_length=1, max_length=50, pattern=CODE_PATTERN)
    description: str = Field(..., min_length=1)
    abbreviation: str = Field(..., min_length=1)

    @field_validator("code")
    @classmethod
    def upper_code(cls, v: str) -> str:
        return v.upper()

    @field_validator("description", "abbreviation")
    @classmethod
    def strip(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("must not be blank")
        return v
