"""Services shared by the type definition factories."""
