"""dailylist - a personal daily task list."""
