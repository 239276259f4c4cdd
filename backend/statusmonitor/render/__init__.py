"""Renderers for status pages, badges and charts."""
from .graphics import render_badge, render_sparkline
from .pages import SitePage, TargetView, render_index, render_service, report_link
from .site import SiteGenerator

__all__ = [
    "render_badge",
    "render_sparkline",
    "render_index",
    "render_service",
    "report_link",
    "SitePage",
    "TargetView",
    "SiteGenerator",
]
