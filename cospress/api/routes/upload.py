from fastapi import APIRouter, File, UploadFile
from starlette.concurrency import run_in_threadpool

from cospress.core.config import get_settings, load_cos_config
from cospress.core.errors import EmptyUpload, UploadTooLarge
from cospress.schemas.cos import CosStatusResponse, UploadImageResponse
from cospress.services.cos import CosService, UploadResult
from cospress.services.digest import extension_from_filename

router = APIRouter(prefix="/v1/uploads", tags=["uploads"])


def _upload_with_fresh_config(env_path: str, content: bytes, extension: str) -> UploadResult:
    # Re-read on every request: the settings file may change between uploads.
    service = CosService(load_cos_config(env_path))
    return service.upload(content, extension)


@router.post("/images", response_model=UploadImageResponse)
async def upload_image(file: UploadFile = File(...)) -> UploadImageResponse:
    settings = get_settings()

    content = await file.read(settings.max_upload_bytes + 1)
    if not content:
        raise EmptyUpload()
    if len(content) > settings.max_upload_bytes:
        raise UploadTooLarge(len(content), settings.max_upload_bytes)

    extension = extension_from_filename(file.filename)
    result = await run_in_threadpool(_upload_with_fresh_config, settings.cos_env_path, content, extension)
    return UploadImageResponse(url=result.url, key=result.key, uploaded=result.uploaded)


@router.get("/config", response_model=CosStatusResponse)
def get_upload_config() -> CosStatusResponse:
    config = load_cos_config(get_settings().cos_env_path)
    return CosStatusResponse(
        configured=config.is_complete(),
        missing_fields=config.missing_fields(),
        bucket=config.bucket,
        region=config.region,
        prefix=config.prefix,
        cdn_domain=config.cdn_domain or None,
    )
