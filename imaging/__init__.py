"""Photo attachment downsampling before drafts are saved."""
