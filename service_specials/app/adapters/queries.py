"""
GraphQL documents sent to the Dutchie Plus inventory API.
"""

STORES_QUERY = """
query GetStores {
  retailers {
    id
    name
    address
    phone
  }
}
""".strip()

SPECIALS_QUERY = """
query GetSpecialProducts($retailerId: ID!) {
  menu(retailerId: $retailerId) {
    products {
      id
      name
      brand {
        name
      }
      category
      subcategory
      image
      description
      potencyCbd {
        formatted
      }
      potencyThc {
        formatted
      }
      variants {
        id
        option
        priceRec
        specialPriceRec
        quantity
      }
    }
  }
}
""".strip()
