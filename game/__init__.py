"""Game engine core: content config, state, intents and the frame loop."""
