"""
PySide6 adapters for kalpager.

Implements the page-scroller and time-scroller contracts of the paging core
with Qt property animations.
"""

from .scrollers import QtPageScroller, ScrollBarTimeScroller, PagePosition, easing_curve

__all__ = [
    'QtPageScroller',
    'ScrollBarTimeScroller',
    'PagePosition',
    'easing_curve',
]
