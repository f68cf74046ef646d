"""Custom exceptions for Mailbox Search."""


class MailboxSearchError(Exception):
    """Base exception for all Mailbox Search errors."""


class NonRetriableError(MailboxSearchError):
    """Exception raised for permanent failures that a job must not retry."""


class MessageNotFoundError(NonRetriableError):
    """Exception raised when a referenced message does not exist."""


class ConversationNotFoundError(NonRetriableError):
    """Exception raised when a message's conversation does not exist."""


class MailboxNotFoundError(NonRetriableError):
    """Exception raised when a referenced mailbox does not exist."""


class StoreError(MailboxSearchError):
    """Exception raised for transient failures reading or writing the store."""


class ConfigurationError(MailboxSearchError):
    """Exception raised for configuration related errors."""


class ValidationError(MailboxSearchError):
    """Exception raised for data validation errors."""
