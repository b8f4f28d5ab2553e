"""Console logging for matchmaking traffic."""
