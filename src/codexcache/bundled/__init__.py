"""Static instructions shipped with the package, served when network and cache both fail."""
