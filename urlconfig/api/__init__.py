"""HTTP routers."""
from urlconfig.api import github

__all__ = ["github"]
