"""Pull request validations."""
