"""
Canonical contact fields and the header synonym table.

Static configuration shared by every import wizard. Both tables are
tuples so they can be read from any number of wizards without copying.
Order matters: the matcher walks SYNONYM_TABLE top to bottom and the
first unclaimed field wins.
"""

# =============================================================================
# CANONICAL FIELDS
# =============================================================================
# (key, label) in the order the operator sees them in the target dropdown.

CANONICAL_FIELDS: tuple[tuple[str, str], ...] = (
    ("id", "Record ID"),
    ("firstName", "First Name"),
    ("lastName", "Last Name"),
    ("email", "Email Address"),
    ("hashedEmail", "Hashed Email"),
    ("address", "Street Address"),
    ("city", "City"),
    ("state", "State"),
    ("zip", "ZIP Code"),
    ("gender", "Gender"),
    ("birthDate", "Date of Birth"),
    ("age", "Age"),
    ("mortgageLoanType", "Mortgage Loan Type"),
    ("mortgageAmount", "Mortgage Amount (USD)"),
    ("mortgageAge", "Mortgage Age (Years)"),
    ("householdIncome", "Household Income (USD)"),
    ("homeOwnership", "Home Ownership"),
    ("homePrice", "Home Purchase Price (USD)"),
    ("homeValue", "Current Home Value (USD)"),
    ("lengthOfResidence", "Length of Residence (Years)"),
    ("maritalStatus", "Marital Status"),
    ("householdPersons", "Household Size"),
    ("householdChildren", "Number of Children"),
    ("lastPageViewed", "Last Page Viewed"),
    ("url", "Website Page Visited"),
    ("cid", "Account Name"),
)

CANONICAL_FIELD_KEYS: tuple[str, ...] = tuple(key for key, _ in CANONICAL_FIELDS)

FIELD_LABELS: dict[str, str] = dict(CANONICAL_FIELDS)


# =============================================================================
# SYNONYM TABLE
# =============================================================================
# Header spellings accepted for each field. Comparison is case-insensitive,
# so "EMAIL" and "email" are listed only where exports commonly use them.
# Entries follow CANONICAL_FIELDS order.

SYNONYM_TABLE: tuple[tuple[str, tuple[str, ...]], ...] = (
    ("id", ("id", "identifier", "record_id", "Record ID")),
    ("firstName", ("firstName", "first_name", "First Name", "FirstName", "fname")),
    ("lastName", ("lastName", "last_name", "Last Name", "LastName", "lname")),
    ("email", ("email", "Email", "EMAIL", "email_address", "emailAddress", "Email Address")),
    ("hashedEmail", ("hashedEmail", "hashed_email", "emailHash", "md5_email")),
    ("address", ("address", "Address", "street_address", "streetAddress", "Street Address")),
    ("city", ("city", "City", "CITY")),
    ("state", ("state", "State", "STATE")),
    ("zip", ("zip", "Zip", "ZIP", "zipcode", "zipCode", "zip_code", "postal_code")),
    ("gender", ("gender",)),
    ("birthDate", ("birthDate", "birth_date", "Birth Date", "dob", "date_of_birth")),
    ("age", ("age", "Age", "AGE")),
    ("mortgageLoanType", ("mortgageLoanType", "mortgage_loan_type", "Mortgage Loan Type", "loan_type")),
    ("mortgageAmount", ("mortgageAmount", "mortgage_amount", "loanAmount", "loan_amount")),
    ("mortgageAge", ("mortgageAge", "mortgage_age", "Mortgage Age", "loan_age")),
    ("householdIncome", ("householdIncome", "household_income", "income")),
    ("homeOwnership", ("homeOwnership", "home_ownership", "Home Ownership", "ownership")),
    ("homePrice", ("homePrice", "home_price", "Home Price", "purchase_price")),
    ("homeValue", ("homeValue", "home_value", "propertyValue", "property_value")),
    ("lengthOfResidence", ("lengthOfResidence", "length_of_residence", "Length of Residence", "years_at_address")),
    ("maritalStatus", ("maritalStatus", "marital_status", "married")),
    ("householdPersons", ("householdPersons", "household_persons", "Household Persons", "household_size")),
    ("householdChildren", ("householdChildren", "household_children", "Household Children", "children")),
    ("lastPageViewed", ("lastPageViewed", "last_page_viewed", "Last Page Viewed", "page_path")),
    ("url", ("url", "URL", "websiteUrl", "website_url", "site_url")),
    ("cid", ("cid", "CID", "clientId")),
)
