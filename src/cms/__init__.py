"""Records and input schemas for the headless CMS."""
