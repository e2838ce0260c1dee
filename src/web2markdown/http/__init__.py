"""HTTP client for page fetching and refine requests."""

from .client import AsyncHttpClient, decode_response
from .protocols import HttpClient, HttpResponse

__all__ = ["AsyncHttpClient", "HttpClient", "HttpResponse", "decode_response"]
