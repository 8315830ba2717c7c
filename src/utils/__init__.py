"""
Shared configuration, logging, validation and pagination helpers
"""
