"""dotnet-versions: resolve and deduplicate .NET SDK/Runtime version requests."""

__version__ = "1.0.0"
