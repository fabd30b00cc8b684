"""
GalleryVote - Gated caption/image gallery with up/down voting.

Example:
    >>> from galleryvote.domains.gallery import GalleryView
    >>> async with GalleryView(auth, store, redirect_to=callback_url) as view:
    ...     await view.cast_vote("c1", 1)
"""

__version__ = "0.1.0"
__all__ = ["__version__"]
