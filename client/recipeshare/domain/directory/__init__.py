"""User directory domain exports."""

from .controller import UserSearchController
from .exceptions import DirectoryError, LookupFailure, NotAuthenticated, ToggleFailure, TransportError
from .fetcher import DirectoryClient
from .listing import FetchTicket, ListingStore
from .models import DEFAULT_AVATAR_URL, FetchMode, ResultPage, UserSummary, VisibleListing

__all__ = [
	"DEFAULT_AVATAR_URL",
	"DirectoryClient",
	"DirectoryError",
	"FetchMode",
	"FetchTicket",
	"ListingStore",
	"LookupFailure",
	"NotAuthenticated",
	"ResultPage",
	"ToggleFailure",
	"TransportError",
	"UserSearchController",
	"UserSummary",
	"VisibleListing",
]
