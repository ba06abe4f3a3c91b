"""Name generation core: model access, prompting and output parsing."""
