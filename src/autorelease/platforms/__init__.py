"""Hosted release platforms."""

from __future__ import annotations

from autorelease.platforms.github import GitHubPublisher

__all__ = ["GitHubPublisher"]
