"""Pipeline plumbing shared by the synthesis passes."""
