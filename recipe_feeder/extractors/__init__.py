"""Extractors package."""
from .fetcher import ContentFetcher, is_challenge_page
from .video import VideoInfo, VideoResolver

__all__ = ["ContentFetcher", "VideoInfo", "VideoResolver", "is_challenge_page"]
