"""Static jq reference documents served as MCP resources."""

PATTERNS_URI = "patterns://jq"
COOKBOOK_URI = "cookbook://jq"

JQ_PATTERNS = """# Common jq Patterns and Examples

## Basic Filtering
- `.fieldname` - Extract a field value
- `.[0]` - Get first array element
- `.[] | .name` - Extract name from each item
- `.items[] | select(.active)` - Filter active items

## Array Operations
- `length` - Get array length
- `map(.field)` - Extract field from each item
- `sort_by(.date)` - Sort by date field
- `group_by(.category)` - Group by category
- `unique_by(.id)` - Remove duplicates by id
- `add` - Sum all numbers in array

## Object Operations
- `keys` - Get all object keys
- `has("field")` - Check if field exists
- `del(.field)` - Delete a field
- `{name: .name, age: .age}` - Select specific fields

## Conditional Logic
- `if .age > 18 then "adult" else "minor" end` - Conditional
- `select(.status == "active")` - Filter by condition
- `// "default"` - Provide default value

## String Operations
- `split(",")` - Split string by comma
- `join(" ")` - Join array with space
- `contains("text")` - Check if contains text
- `startswith("prefix")` - Check prefix

## Variables
- `--arg name value` binds a string, referenced as `$name`
- `--argjson name '{"a": 1}'` binds a JSON value
- `.[] | select(.name == $name)` - Compare against a bound variable

## Advanced Transformations
- `reduce .[] as $item (0; . + $item.value)` - Reduce operation
- `to_entries | map(select(.value > 10)) | from_entries` - Filter object values
- `flatten` - Flatten nested arrays
- `reverse` - Reverse array order

## Data Type Conversion
- `tonumber` - Convert to number
- `tostring` - Convert to string
- `type` - Get data type
- `@base64` - Base64 encode
- `@uri` - URL encode
"""

JQ_COOKBOOK = """# jq Cookbook - Common Tasks

## Data Extraction
```bash
# Extract all email addresses
jq '.users[].email'

# Get names of active users
jq '.users[] | select(.active) | .name'

# Extract nested values
jq '.data.results[].attributes.title'
```

## Data Transformation
```bash
# Reshape object structure
jq '{name: .fullname, id: .user_id, status: .is_active}'

# Create summary statistics
jq '{total: length, active: map(select(.active)) | length}'

# Flatten and restructure
jq '.categories[] | {name: .name, items: .items[].title}'
```

## Filtering and Selection
```bash
# Filter by multiple conditions
jq '.[] | select(.age > 21 and .status == "active")'

# Find items with specific property
jq '.[] | select(has("premium") and .premium == true)'

# Get top N items
jq 'sort_by(.score) | reverse | .[0:5]'
```

## Aggregation and Grouping
```bash
# Group by field and count
jq 'group_by(.department) | map({department: .[0].department, count: length})'

# Calculate totals
jq 'map(.amount) | add'

# Find min/max values
jq 'map(.score) | {min: min, max: max, avg: (add / length)}'
```

## Working with Arrays
```bash
# Merge multiple arrays
jq '.arrays | add'

# Remove duplicates
jq 'unique'

# Sort complex objects
jq 'sort_by(.date, .name)'
```

## Error Handling
```bash
# Provide defaults for missing fields
jq '.field // "default_value"'

# Skip errors
jq '.[] | .field?'

# Handle different data types
jq 'if type == "array" then .[] else . end'
```
"""
