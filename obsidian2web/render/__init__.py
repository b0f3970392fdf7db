"""HTML emission for pages, navigation and aggregate pages."""
