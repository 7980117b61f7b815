"""
Search Gateway

Video search against the YouTube Data API v3. A search is one request to the
search endpoint followed by one request to the videos endpoint for view
counts and durations. Failures are raised once, never retried.
"""

import json
import logging
import re
import time
from datetime import datetime, timedelta, timezone
from typing import Optional

import httpx

from pathfinder.exceptions import SearchProviderError
from pathfinder.models.learning_path import SearchCandidate
from pathfinder.utils.text_utils import sanitize_input
from shared.utils.constants import (
    SEARCH_EXTRA_RESULTS,
    SEARCH_PROVIDER_MAX_RESULTS,
    SEARCH_PUBLISHED_WITHIN_DAYS,
)

logger = logging.getLogger("pathfinder.search_gateway")

YOUTUBE_SEARCH_URL = "https://www.googleapis.com/youtube/v3/search"
YOUTUBE_VIDEOS_URL = "https://www.googleapis.com/youtube/v3/videos"

_ISO_DURATION = re.compile(r"^PT(?:(\d+)H)?(?:(\d+)M)?(?:(\d+)S)?$")


def format_duration(iso_duration: str) -> Optional[str]:
    """PT1H2M3S -> 1:02:03, PT4M5S -> 04:05. None when unparseable."""
    match = _ISO_DURATION.match(iso_duration or "")
    if not match or not any(match.groups()):
        return None

    hours, minutes, seconds = (int(part) if part else 0 for part in match.groups())
    if hours:
        return f"{hours}:{minutes:02d}:{seconds:02d}"
    return f"{minutes:02d}:{seconds:02d}"


def format_view_count(count: int) -> str:
    if count >= 1_000_000_000:
        return f"{count / 1_000_000_000:.1f}B views"
    if count >= 1_000_000:
        return f"{count / 1_000_000:.1f}M views"
    if count >= 1_000:
        return f"{count / 1_000:.1f}K views"
    return f"{count} views"


class YouTubeSearchGateway:
    """Search provider client. Pass `client` to reuse or mock the HTTP transport."""

    def __init__(self, api_key: str, timeout: float = 15.0, client: Optional[httpx.Client] = None):
        self.api_key = api_key
        self.client = client or httpx.Client(timeout=timeout)

    def search(self, query: str, max_results: int) -> list[SearchCandidate]:
        """
        Search for tutorial videos.

        Args:
            query: Search terms
            max_results: Maximum number of candidates to return

        Returns:
            Candidates ordered by view count, most viewed first

        Raises:
            SearchProviderError: Missing API key or provider failure
        """
        query = sanitize_input(query)
        if not self.api_key:
            raise SearchProviderError("YouTube API key not configured", query=query)

        start_time = time.time()
        logger.info(json.dumps({
            "step": "VIDEO_SEARCH",
            "status": "starting",
            "query": query,
            "max_results": max_results,
        }))

        published_after = datetime.now(timezone.utc) - timedelta(days=SEARCH_PUBLISHED_WITHIN_DAYS)
        search_data = self._get(YOUTUBE_SEARCH_URL, {
            "part": "snippet",
            "q": query,
            "type": "video",
            "maxResults": min(max_results + SEARCH_EXTRA_RESULTS, SEARCH_PROVIDER_MAX_RESULTS),
            "order": "relevance",
            "relevanceLanguage": "en",
            "videoDuration": "medium",
            "videoDefinition": "high",
            "publishedAfter": published_after.strftime("%Y-%m-%dT%H:%M:%SZ"),
        }, query)

        items = [item for item in search_data.get("items", []) if item.get("id", {}).get("videoId")]
        if not items:
            logger.info(json.dumps({"step": "VIDEO_SEARCH", "status": "complete", "results": 0}))
            return []

        details_data = self._get(YOUTUBE_VIDEOS_URL, {
            "part": "statistics,contentDetails",
            "id": ",".join(item["id"]["videoId"] for item in items),
        }, query)
        details = {item.get("id"): item for item in details_data.get("items", [])}

        ranked = []
        for item in items:
            video_id = item["id"]["videoId"]
            views = self._view_count(details.get(video_id))
            ranked.append((views, self._to_candidate(item, details.get(video_id), views)))

        ranked.sort(key=lambda pair: pair[0] or 0, reverse=True)
        candidates = [candidate for _, candidate in ranked[:max_results]]

        logger.info(json.dumps({
            "step": "VIDEO_SEARCH",
            "status": "complete",
            "results": len(candidates),
            "duration_ms": int((time.time() - start_time) * 1000),
        }))
        return candidates

    def _get(self, url: str, params: dict, query: str) -> dict:
        try:
            response = self.client.get(url, params={**params, "key": self.api_key})
        except httpx.HTTPError as e:
            logger.error(json.dumps({"step": "VIDEO_SEARCH", "status": "failed", "error": str(e)}))
            raise SearchProviderError(f"YouTube request failed: {e}", query=query) from e

        if response.status_code != 200:
            try:
                message = response.json().get("error", {}).get("message") or "YouTube search failed"
            except ValueError:
                message = "YouTube search failed"
            logger.error(json.dumps({
                "step": "VIDEO_SEARCH",
                "status": "failed",
                "status_code": response.status_code,
                "error": message,
            }))
            raise SearchProviderError(message, status_code=response.status_code, query=query)

        try:
            return response.json()
        except ValueError as e:
            raise SearchProviderError("YouTube returned an unreadable response", query=query) from e

    @staticmethod
    def _view_count(details: Optional[dict]) -> Optional[int]:
        raw = ((details or {}).get("statistics") or {}).get("viewCount")
        try:
            return int(raw) if raw is not None else None
        except (TypeError, ValueError):
            return None

    @staticmethod
    def _to_candidate(item: dict, details: Optional[dict], views: Optional[int]) -> SearchCandidate:
        video_id = item["id"]["videoId"]
        snippet = item.get("snippet", {})
        thumbnails = snippet.get("thumbnails", {})
        thumbnail = next(
            (thumbnails[size]["url"] for size in ("high", "medium", "default") if size in thumbnails),
            "",
        )
        iso_duration = ((details or {}).get("contentDetails") or {}).get("duration")

        return SearchCandidate(
            id=video_id,
            title=snippet.get("title", ""),
            description=snippet.get("description", ""),
            channel_label=snippet.get("channelTitle", ""),
            published_at=snippet.get("publishedAt", ""),
            duration_label=format_duration(iso_duration) if iso_duration else None,
            view_count_label=format_view_count(views) if views is not None else None,
            url=f"https://www.youtube.com/watch?v={video_id}",
            thumbnail=thumbnail,
        )
