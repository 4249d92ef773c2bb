from pydantic import BaseModel


class UploadUrlRequest(BaseModel):
    filename: str
    contentType: str


class UploadUrlResponse(BaseModel):
    uploadUrl: str
    filePath: str  # storage key to send back when creating the video record
    contentType: str
    contentDisposition: str = "inline"
    uploadFields: dict  # Fields for presigned POST
