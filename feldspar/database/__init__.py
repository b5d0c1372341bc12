"""Versioned chunk storage: keys, changes, a transactional store and the map database."""