"""Text, HTML and CSV reports and matplotlib diagram rendering."""
