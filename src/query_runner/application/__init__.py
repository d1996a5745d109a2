"""Application layer: error taxonomy shared by every stage of a run."""
