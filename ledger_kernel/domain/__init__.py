"""Pure domain layer: request parsing, amounts, dates and result DTOs."""
