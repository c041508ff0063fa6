"""Task management backend with due-date reminders."""
