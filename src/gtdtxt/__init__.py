"""gtdtxt - plain-text task journal parser and classifier."""
