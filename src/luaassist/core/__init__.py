"""Core deduction machinery: IR, engine, configuration and errors."""
