"""
Translation of domain errors into HTTP responses
"""
from fastapi import HTTPException

from storefront.core.exceptions import StorefrontError


def http_error(error: StorefrontError) -> HTTPException:
    """HTTPException carrying the error's status code and {code, message, ...context}"""
    return HTTPException(status_code=error.status_code, detail=error.to_dict())
