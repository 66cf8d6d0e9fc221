"""
Content generation for job applications.
"""

from .content_generator import ContentGenerator, JobRole, create_generator

__all__ = ["ContentGenerator", "JobRole", "create_generator"]
