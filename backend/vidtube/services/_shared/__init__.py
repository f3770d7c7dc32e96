"""Cross-service building blocks: errors, DTOs, ports and the base service."""
