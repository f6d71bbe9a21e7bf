"""
Business services behind the API routes.

Services take an ``AsyncSession`` plus plain arguments, raise ``ApiError``
subclasses on failure and return dictionaries or entities ready for the
response envelope.
"""
