"""Video record, video upload and thumbnail upload routes."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Request, status

from tubely.auth import get_current_user
from tubely.core import di
from tubely.core.provider import LoggingProvider
from tubely.errors import PayloadTooLarge
from tubely.media import authorize_video_owner, ThumbnailPipeline, UploadPipeline
from tubely.model import User
from tubely.storage import Session
from tubely.storage import video as video_storage

from ..form import StreamedFilePart
from ..view.video import VideoCreateRequest, VideoListResponse, VideoResponse

router = APIRouter(prefix="/api/videos", tags=["video"])

# allowance for multipart boundaries and part headers on top of the file itself
FORM_OVERHEAD = 64 << 10


def _check_declared_length(request: Request, max_bytes: int) -> None:
    declared = request.headers.get("content-length", "")
    if declared.isdigit() and int(declared) > max_bytes + FORM_OVERHEAD:
        raise PayloadTooLarge(f"upload exceeds {max_bytes} bytes")


@router.post("", operation_id="create_video", status_code=status.HTTP_201_CREATED)
@di.inject
def create_video(
    request: VideoCreateRequest,
    user: User = Depends(get_current_user),
    session: Session = Depends(di.Manage["storage.persistent.session"]),
) -> VideoResponse:
    """Create a draft video owned by the caller."""
    with session.begin():
        video = video_storage.create(
            user_id=user.user_id, title=request.title, description=request.description, session=session
        )
    LoggingProvider.get_logger().info("created video", extra={"video_id": video.video_id, "user_id": user.user_id})
    return VideoResponse.from_model(video)


@router.get("", operation_id="list_videos")
@di.inject
def list_videos(
    user: User = Depends(get_current_user),
    session: Session = Depends(di.Manage["storage.persistent.session"]),
) -> VideoListResponse:
    with session.begin():
        videos = video_storage.find(user_id=user.user_id, session=session)
    return VideoListResponse(videos=[VideoResponse.from_model(v) for v in videos])


@router.get("/{video_id}", operation_id="get_video")
@di.inject
def get_video(
    video_id: str,
    user: User = Depends(get_current_user),
    session: Session = Depends(di.Manage["storage.persistent.session"]),
) -> VideoResponse:
    with session.begin():
        video = authorize_video_owner(video_id, user, session=session)
    return VideoResponse.from_model(video)


@router.post("/{video_id}/video", operation_id="upload_video")
@di.inject
async def upload_video(
    video_id: str,
    request: Request,
    user: User = Depends(get_current_user),
    session: Session = Depends(di.Manage["storage.persistent.session"]),
    pipeline: UploadPipeline = Depends(di.Provide["upload_pipeline"]),
) -> VideoResponse:
    """Publish the multipart field ``video`` (``video/mp4``) as the video's content.

    Ownership is settled before the request body is read. The body is then
    parsed only as fast as the pipeline consumes it, so the declared media
    type and the size ceiling are enforced before the rest is received.
    """
    with session.begin():
        video = authorize_video_owner(video_id, user, session=session)

    _check_declared_length(request, pipeline.max_bytes)
    upload = await StreamedFilePart.open(
        request.headers.get("content-type"), request.stream(), "video", pipeline.max_bytes + FORM_OVERHEAD
    )
    updated = await pipeline.run(video, upload, upload.content_type, session)

    return VideoResponse.from_model(updated)


@router.post("/{video_id}/thumbnail", operation_id="upload_thumbnail")
@di.inject
async def upload_thumbnail(
    video_id: str,
    request: Request,
    user: User = Depends(get_current_user),
    session: Session = Depends(di.Manage["storage.persistent.session"]),
    pipeline: ThumbnailPipeline = Depends(di.Provide["thumbnail_pipeline"]),
) -> VideoResponse:
    """Store the multipart field ``thumbnail`` (JPEG, PNG or GIF) as the video's thumbnail."""
    with session.begin():
        video = authorize_video_owner(video_id, user, session=session)

    _check_declared_length(request, pipeline.max_bytes)
    upload = await StreamedFilePart.open(
        request.headers.get("content-type"), request.stream(), "thumbnail", pipeline.max_bytes + FORM_OVERHEAD
    )
    updated = await pipeline.run(video, upload, upload.content_type, session)

    return VideoResponse.from_model(updated)
