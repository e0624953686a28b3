"""Generate slog LogValue() methods for Go structs marked with a go:generate oak directive."""

__version__ = "0.0.1"