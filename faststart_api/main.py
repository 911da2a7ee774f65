# main.py
import asyncio, logging, os, time

from dotenv import load_dotenv
from fastapi import Depends, FastAPI, Request
from fastapi.responses import JSONResponse, PlainTextResponse

from faststart_api.config import ApiConfig, get_config
from faststart_api.errors import ApiError, BadRequestError, NotFoundError, UserForbiddenError
from faststart_api.schemas import ErrorOut, VideoOut
from faststart_api.services.auth import get_bearer_token, validate_jwt
from faststart_api.services.ffmpeg_service import (
    get_video_aspect_ratio, process_video_for_fast_start, processed_path_for,
)
from faststart_api.services.s3_utils import make_s3_key, public_url, upload_file
from faststart_api.services.uploads import TempArtifacts, random_filename, stage_upload, validate_upload

load_dotenv()

logging.basicConfig(level=os.getenv("LOG_LEVEL", "INFO").upper())
logger = logging.getLogger(__name__)

app = FastAPI(title="Fast-start video upload")


@app.exception_handler(ApiError)
async def api_error_handler(request: Request, exc: ApiError):
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    else:
        logger.info("%s %s rejected (%s): %s", request.method, request.url.path, exc.status_code, exc.message)
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception("%s %s crashed", request.method, request.url.path)
    return JSONResponse(status_code=500, content={"error": str(exc) or exc.__class__.__name__})


@app.get("/health", response_class=PlainTextResponse)
async def health():
    return "ok"


@app.post(
    "/api/video_upload/{video_id}",
    response_model=VideoOut,
    responses={code: {"model": ErrorOut} for code in (400, 401, 403, 404, 500)},
)
async def upload_video(
    video_id: str,
    request: Request,
    cfg: ApiConfig = Depends(get_config),
):
    if not video_id.strip():
        raise BadRequestError("Invalid video id")

    token = get_bearer_token(request.headers)
    user_id = validate_jwt(token, cfg.jwt_secret)

    record = cfg.db.get_video(video_id)
    if record is None:
        raise NotFoundError("Couldn't find video")
    if record.user_id != user_id:
        raise UserForbiddenError("Not authorized to upload this video")

    # body is only read once the caller is known to own the record
    async with request.form() as form:
        video = form.get("video")
        media_type = validate_upload(video)
        filename = random_filename(media_type)

        t0 = time.perf_counter()
        with TempArtifacts() as temps:
            temp_path = temps.add(os.path.join(cfg.tmp_dir, filename))
            size = await stage_upload(video, temp_path)
            t1 = time.perf_counter()

            aspect_ratio = await asyncio.to_thread(get_video_aspect_ratio, cfg.media, temp_path)
            t2 = time.perf_counter()

            # registered before the remux runs so a half-written output is removed too
            processed_path = temps.add(processed_path_for(temp_path))
            await asyncio.to_thread(process_video_for_fast_start, cfg.media, temp_path)
            t3 = time.perf_counter()

            key = make_s3_key(aspect_ratio, filename)
            await asyncio.to_thread(
                upload_file, cfg.s3_client, cfg.s3_bucket, processed_path, key, content_type=media_type,
            )
            t4 = time.perf_counter()

            record.video_url = public_url(cfg.s3_cf_distribution, key)
            cfg.db.update_video(record)

    logger.info(
        "[ffx] video=%s bytes=%d key=%s stage=%.2fs, probe=%.2fs, remux=%.2fs, upload=%.2fs, total=%.2fs",
        video_id, size, key, t1 - t0, t2 - t1, t3 - t2, t4 - t3, time.perf_counter() - t0,
    )
    return VideoOut.from_video(record)


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host=os.getenv("HOST", "0.0.0.0"), port=int(os.getenv("PORT", "8000")))
