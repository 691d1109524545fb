"""CodeScalpel core: edit pipeline, configuration and live logging."""
