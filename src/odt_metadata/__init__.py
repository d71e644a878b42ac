"""Read and edit metadata embedded in OpenDocument files."""
