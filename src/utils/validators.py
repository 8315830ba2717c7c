"""
Input validation utilities for domains, project slugs and build paths
"""

import re
from pathlib import PurePosixPath


class ValidationError(Exception):
    """Custom exception for validation errors"""
    pass


class DomainValidator:
    """Validator for domain names"""

    # RFC-compliant hostname regex (at least one dot, alpha TLD)
    DOMAIN_REGEX = re.compile(
        r'^(?:[a-zA-Z0-9](?:[a-zA-Z0-9-]{0,61}[a-zA-Z0-9])?\.)+[a-zA-Z]{2,}$'
    )

    @classmethod
    def validate(cls, domain: str) -> str:
        """
        Validate a domain name.

        Args:
            domain: Domain name to validate

        Returns:
            Cleaned domain name (lowercase, stripped)

        Raises:
            ValidationError: If domain is invalid
        """
        if not domain:
            raise ValidationError("Domain name cannot be empty")

        domain = domain.strip().lower()

        # Remove http(s):// if present
        domain = re.sub(r'^https?://', '', domain)

        domain = domain.rstrip('/')

        if len(domain) > 253:  # RFC 1035
            raise ValidationError("Domain name too long (max 253 characters)")

        if not cls.DOMAIN_REGEX.match(domain):
            raise ValidationError(
                f"Invalid domain format: {domain}. "
                "Domain must contain only letters, numbers, hyphens and dots."
            )

        return domain


class SlugValidator:
    """Validator for provider project / site names"""

    # Vercel and Netlify both accept lowercase letters, digits and hyphens
    SLUG_REGEX = re.compile(r'^[a-z0-9](?:[a-z0-9-]{0,98}[a-z0-9])?$')

    @classmethod
    def validate(cls, slug: str) -> str:
        if not slug:
            raise ValidationError("Project name cannot be empty")

        slug = slug.strip().lower()
        if not cls.SLUG_REGEX.match(slug):
            raise ValidationError(
                f"Invalid project name: {slug}. "
                "Use lowercase letters, numbers and hyphens (max 100 characters)."
            )
        return slug


class BuildPathValidator:
    """Validator for build-relative file paths"""

    @classmethod
    def validate(cls, path: str) -> str:
        """
        Normalize a build-relative path to POSIX form.

        Raises:
            ValidationError: If the path is absolute or escapes the build root
        """
        if not path:
            raise ValidationError("Build path cannot be empty")

        posix = path.replace("\\", "/")
        pure = PurePosixPath(posix)
        if pure.is_absolute():
            raise ValidationError(f"Build path must be relative: {path}")
        if any(part == ".." for part in pure.parts):
            raise ValidationError(f"Build path escapes the build root: {path}")

        parts = [part for part in pure.parts if part not in ("", ".")]
        if not parts:
            raise ValidationError(f"Build path has no file component: {path}")
        return "/".join(parts)


def validate_domain(domain: str) -> str:
    """Convenience function for domain validation"""
    return DomainValidator.validate(domain)


def validate_slug(slug: str) -> str:
    """Convenience function for project name validation"""
    return SlugValidator.validate(slug)


def validate_build_path(path: str) -> str:
    """Convenience function for build path validation"""
    return BuildPathValidator.validate(path)
