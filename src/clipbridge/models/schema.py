from pydantic import BaseModel, ConfigDict


class TextBody(BaseModel):
    model_config = ConfigDict(extra="ignore")

    text: str = ""


class FileBody(BaseModel):
    model_config = ConfigDict(extra="ignore")

    names: str = ""  # Name1\nName2...
    files: str = ""  # File1Base64\nFile2Base64...


class ResponseFile(BaseModel):
    name: str
    content: str


class ErrorBody(BaseModel):
    error: str
