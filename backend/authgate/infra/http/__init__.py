from .avatar_fetcher import RequestsAvatarFetcher

__all__ = ["RequestsAvatarFetcher"]
