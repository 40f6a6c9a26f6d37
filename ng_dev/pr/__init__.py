"""Pull request labels and validations."""
