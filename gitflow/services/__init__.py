"""Git-flow workflows and the release pipeline."""
