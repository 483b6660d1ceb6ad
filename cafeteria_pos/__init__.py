"""Cafeteria point-of-sale backend with recipe-driven inventory deduction."""
