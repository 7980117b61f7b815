"""Direct video search endpoint."""
from fastapi import APIRouter, Depends

from pathfinder.api.dependencies import get_search_gateway
from pathfinder.exceptions import SearchProviderError
from pathfinder.services.search_gateway import YouTubeSearchGateway
from shared.models.schemas import SearchRequest, SearchResponse
from shared.utils.exceptions import SearchUnavailableException

router = APIRouter(prefix="/search", tags=["search"])


@router.post("", response_model=SearchResponse)
def search_videos(request: SearchRequest, gateway: YouTubeSearchGateway = Depends(get_search_gateway)):
    """Search tutorials without going through the conversation."""
    try:
        tutorials = gateway.search(request.query, request.max_results)
    except SearchProviderError as e:
        raise SearchUnavailableException(e).to_http_exception()
    return SearchResponse(query=request.query, tutorials=tutorials)
