"""GitHub URL API: joins the configured base URL and repository path."""
from fastapi import APIRouter, Depends, Request
from fastapi.responses import PlainTextResponse

from urlconfig.config import UrlConfig

router = APIRouter()


def get_url_config(request: Request) -> UrlConfig:
    """The UrlConfig the app was built with (set by create_app)."""
    return request.app.state.url_config


@router.get("/githuburl", response_class=PlainTextResponse)
async def get_github_url(url_config: UrlConfig = Depends(get_url_config)) -> str:
    """Return `{base_url}/{repository_url}` verbatim; slashes are not normalized."""
    return f"{url_config.base_url}/{url_config.repository_url}"
