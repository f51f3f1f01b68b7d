"""AWS EC2 provider: run options, registries, EC2 side effects and strategies."""
