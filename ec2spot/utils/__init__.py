# Shared utilities: configuration, logging, errors, time ranges, concurrency
