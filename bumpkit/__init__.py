"""bumpkit: bump versions in project files, write a changelog, commit and tag."""
