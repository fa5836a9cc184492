# Core package - foundational components
#
# Modules:
# - config: Application settings
# - logging: Structured logging
# - security: Password hashing and JWT tokens
# - storage: Pluggable document storage (MongoDB, in-memory)
