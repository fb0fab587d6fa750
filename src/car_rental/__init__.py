"""Car rental record keeper — fixed-record files, users, cars, and rentals."""
