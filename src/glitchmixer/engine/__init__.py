"""Engine: random stream, effect container, composite pipeline."""
