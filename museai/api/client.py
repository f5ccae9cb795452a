"""Client for the muse.ai REST API.

Every public method translates to one call of :meth:`MuseClient._request`
and returns a :class:`~museai.core.models.Success` or
:class:`~museai.core.models.Failure`. Errors are reported as values and
never raised, apart from local argument errors (``ValueError``).

The client keeps no connection state between calls. The API enforces rate
limits, so callers issuing many requests in a row should pause briefly
between them.
"""

import logging
from typing import Any, BinaryIO, Literal
from urllib.parse import quote

import httpx

from ..config.settings import APIConfig
from ..core.models import (
    NO_CHANGES,
    AnalysisKind,
    Cover,
    CoverByFile,
    CoverByTimestamp,
    Failure,
    Result,
    Success,
    Visibility,
)

logger = logging.getLogger(__name__)

# FIDs are sha256 hex digests, sometimes followed by a random suffix.
FID_LENGTH = 64
METHODS = ("GET", "POST", "PUT", "DELETE", "PATCH")


class MuseClient:
    """Client for interacting with the muse.ai API."""

    def __init__(self, config: APIConfig, transport: httpx.BaseTransport | None = None):
        """Initialize API client with configuration."""
        self.config = config
        self.base_url = config.base_url.rstrip('/') + '/'
        self.cdn_url = config.cdn_url.rstrip('/') + '/'
        self.timeout = httpx.Timeout(config.timeout, connect=config.connect_timeout)
        self._transport = transport

    # Collections

    def list_collections(self) -> Result:
        """Return all collections of the account."""
        return self._request("files/collections")

    def get_collection(self, scid: str) -> Result:
        """Return details of one collection."""
        return self._request(f"files/collections/{_segment(scid)}")

    def create_collection(self, name: str, visibility: Visibility | str) -> Result:
        """Create a collection with the given name and visibility."""
        payload = {
            "name": name,
            "visibility": _visibility(visibility),
        }
        return self._request("files/collections", payload, "POST")

    def delete_collection(self, scid: str) -> Result:
        """Delete a collection."""
        return self._request(f"files/collections/{_segment(scid)}", {}, "DELETE")

    # Videos

    def upload_video(self, file: BinaryIO, collection: str | None = None,
                     visibility: Visibility | str | None = None) -> Result:
        """Upload a video file.

        Supported formats: AVI, MOV, MP4, OGG, WMV, WEBM, MKV, 3GP, M4V, MPEG.
        The vendor defaults the visibility to private.
        """
        payload: dict[str, Any] = {"file": file}
        if collection:
            payload["collection"] = collection
        if visibility:
            payload["visibility"] = _visibility(visibility)
        return self._request("files/upload", payload, "POST")

    def update_video(self, fid: str, visibility: Visibility | str | None = None,
                     title: str | None = None, description: str | None = None,
                     domains: str | list[str] | None = None) -> Result | Literal[False]:
        """Change the supplied attributes of a video.

        ``domains`` restricts embedding to the given domains/referrers.
        Returns ``NO_CHANGES`` without contacting the API when no attribute
        is supplied.
        """
        payload: dict[str, Any] = {}
        if visibility:
            payload["visibility"] = _visibility(visibility)
        if title:
            payload["title"] = title
        if description:
            payload["description"] = description
        if domains:
            payload["domains"] = [domains] if isinstance(domains, str) else list(domains)

        if not payload:
            logger.debug(f"Nothing to update for video {fid}")
            return NO_CHANGES
        return self._request(f"files/set/{_segment(fid)}", payload, "POST")

    def delete_video(self, fid: str) -> Result:
        """Delete a video by file ID."""
        return self._request(f"files/delete/{_segment(fid)}", {}, "DELETE")

    def list_videos(self) -> Result:
        """Return all videos of the account."""
        return self._request("files/videos")

    def get_video(self, svid: str) -> Result:
        """Return details of one video (by video ID, not file ID)."""
        return self._request(f"files/videos/{_segment(svid)}")

    def is_video_ingesting(self, svid: str) -> Any:
        """Return the vendor's ``ingesting`` flag for a video.

        A missing flag, or a failed lookup, counts as not ingesting.
        """
        return ingesting_flag(self.get_video(svid))

    def change_video_cover(self, fid: str, cover: Cover | None = None) -> Result | Literal[False]:
        """Replace the cover of a video with a frame or an uploaded image.

        The cover is not served while the video is private.
        """
        if cover is None:
            logger.debug(f"No cover supplied for video {fid}")
            return NO_CHANGES
        if isinstance(cover, CoverByFile):
            return self._request(f"files/set/{_segment(fid)}/cover", {"file": cover.file}, "POST")
        if isinstance(cover, CoverByTimestamp):
            return self._request(f"files/set/{_segment(fid)}/cover?t={int(cover.seconds)}", {}, "POST")
        raise ValueError(f"Unsupported cover: {cover!r}")

    # Analysis

    def get_video_analysis(self, kind: AnalysisKind | str, svid: str) -> Result:
        """Return one analysis result set of a video."""
        kind = AnalysisKind(kind)
        return self._request(f"files/i/{kind.value}/{_segment(svid)}")

    def get_video_scenes(self, svid: str) -> Result:
        return self.get_video_analysis(AnalysisKind.SCENES, svid)

    def get_video_speech(self, svid: str) -> Result:
        return self.get_video_analysis(AnalysisKind.SPEECH, svid)

    def get_video_text(self, svid: str) -> Result:
        return self.get_video_analysis(AnalysisKind.TEXT, svid)

    def get_video_actions(self, svid: str) -> Result:
        return self.get_video_analysis(AnalysisKind.ACTIONS, svid)

    def get_video_sounds(self, svid: str) -> Result:
        return self.get_video_analysis(AnalysisKind.SOUNDS, svid)

    def get_video_faces(self, svid: str) -> Result:
        return self.get_video_analysis(AnalysisKind.FACES, svid)

    def thumbnail_url(self, fid: str, time: float | None = None) -> str:
        """Build the CDN URL of a video thumbnail.

        With a timestamp of at least one second the frame at that second is
        used. The URL returns 404 while the video is private.
        """
        base = f"{self.cdn_url}w/{_segment(fid[:FID_LENGTH])}/thumbnails"
        if time is not None and int(time) > 0:
            return f"{base}/{int(time):05d}.jpg"
        return f"{base}/thumbnail.jpg"

    def _request(self, endpoint: str = "", payload: dict[str, Any] | None = None,
                 method: str = "GET") -> Result:
        """Send one request and normalize the response."""
        method = method.upper()
        if method not in METHODS:
            raise ValueError(f"Unsupported HTTP method: {method}")

        url = self.base_url + endpoint
        payload = payload or {}
        headers = {"Key": self.config.api_key}
        kwargs: dict[str, Any] = {}

        if method == "GET":
            kwargs["params"] = payload
        elif payload.get("file"):
            fields = {key: value for key, value in payload.items() if key != "file"}
            kwargs["files"] = {"file": payload["file"]}
            if fields:
                kwargs["data"] = fields
        else:
            headers["Content-Type"] = "application/json"
            kwargs["json"] = payload

        logger.debug(f"{method} {url}")
        try:
            with httpx.Client(timeout=self.timeout, verify=self.config.verify_tls,
                              transport=self._transport) as client:
                response = client.request(method, url, headers=headers, **kwargs)
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            logger.error(f"Request to {endpoint} failed: {e}")
            return Failure(str(e) or e.__class__.__name__)

        return self._normalize(response)

    def _normalize(self, response: httpx.Response) -> Result:
        """Turn an HTTP response into a Success or Failure."""
        status_code = response.status_code
        try:
            body = response.json()
        except ValueError:
            body = None

        if not isinstance(body, (dict, list)):
            logger.warning(f"Unexpected response body (HTTP {status_code})")
            return Failure(f"Unknown response: {response.text}", status_code)

        if isinstance(body, dict) and body.get("error"):
            error = body["error"]
            logger.warning(f"API error (HTTP {status_code}): {error}")
            return Failure(error if isinstance(error, str) else str(error), status_code)

        return Success(body, status_code)


def _visibility(value: Visibility | str) -> str:
    """Validate a visibility argument and return its wire value."""
    return Visibility(value).value


def ingesting_flag(result: Result) -> Any:
    """Project the ``ingesting`` flag out of a video lookup.

    A missing flag, or a failed lookup, counts as not ingesting.
    """
    if isinstance(result, Success) and isinstance(result.body, dict):
        return result.body.get("ingesting", False)
    return False


def _segment(value: str) -> str:
    """Escape an identifier for use as a single URL path segment."""
    segment = quote(str(value), safe="")
    if segment in (".", ".."):
        return segment.replace(".", "%2E")
    return segment
