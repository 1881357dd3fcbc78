"""HTTP plumbing shared by routes: problem+json handlers and request ids."""
