from .local_asset_store import LocalAssetStore

__all__ = ["LocalAssetStore"]
