"""Find-or-create Accounts, link Contacts and batch Opportunities against a CRM record store."""
