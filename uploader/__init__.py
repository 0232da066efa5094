from uploader.schemas.uploads import UploadOptions
from uploader.services.uploads import FileUploader, ProcessedFile, UploadResult

__all__ = ["FileUploader", "ProcessedFile", "UploadOptions", "UploadResult"]
