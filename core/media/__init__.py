"""Media Module - Image fetching for vision prompts and durable image proxying."""
from core.media.image_fetcher import EncodedImage, ImageFetcher
from core.media.image_proxy import ImageProxy, ImageStore, LocalImageStore, SupabaseImageStore

__all__ = [
    'EncodedImage',
    'ImageFetcher',
    'ImageProxy',
    'ImageStore',
    'LocalImageStore',
    'SupabaseImageStore',
]
